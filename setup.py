from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    # Basic metadata
    name='core_forum_db',
    version='0.1.0',
    author="Suraj Sharma",
    author_email="spsurajsharma72@gmail.com",

    # Description
    description='Parameterized query building and transaction bookkeeping for the forum data layer.',
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Package structure
    packages=find_packages(include=['core_forum_db', 'core_forum_db.*']),

    # Python requirements
    python_requires=">=3.8",

    # Dependencies
    install_requires=[
        'SQLAlchemy[asyncio]>=2.0.0',
        'tenacity>=8.2.0',
        'asyncpg>=0.28.0',
        'pydantic>=2.0.0',
        'pydantic-settings>=2.0.0',
        'python-dotenv>=1.0.0',
    ],

    # Optional dependencies
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-asyncio>=0.20.0',
        ]
    },

    include_package_data=True,

    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],

    keywords="postgresql, database, query builder, transactions, async, forum",
)

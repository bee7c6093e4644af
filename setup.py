"""
Setup script for factdrill.

factdrill is the adaptive practice engine behind a times-tables game:

1. Weighted question generation - harder tables come up more often
2. Weak-area sessions - built from each learner's attempt log
3. Spaced review - a fixed interval ladder per (learner, fact)

The 'factdrill' command drives all of it from the terminal.
"""

from setuptools import find_packages, setup

setup(
    name="factdrill",
    version="1.0.0",
    description="Adaptive times-table practice engine with weak-fact ranking and spaced review",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="factdrill contributors",
    packages=find_packages(include=["factdrill", "factdrill.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        "psycopg2-binary>=2.9.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "factdrill=factdrill.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition times-tables practice education",
)

# setup.py
from setuptools import setup, find_packages

setup(
    name="seqwrangle",
    version="0.3.0",
    description="Command-line utilities for taxonomy lineages, alignment concatenation and rRNA/ITS extraction",
    author="seqwrangle Contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    entry_points={
        "console_scripts": [
            "seqwrangle=seqwrangle.cli:main",
        ],
    },
    install_requires=[
        "numpy>=1.11",
        "pandas>=1.1",
        "biopython",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.7",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
    ],
)

"""Setup script for contractgen, the multi-target contract code generator."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="contractgen",
    version="0.1.0",
    author="contractgen Team",
    description="Generate Java, TypeScript, Python and Go packages from one API contract",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"contractgen": ["templates/*/*.jinja2"]},
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
        "Jinja2>=3.1",
        "pandas>=2.0.0",
        "networkx>=3.1",
        "tqdm>=4.66.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.5.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "contractgen=contractgen.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3.10",
        "Topic :: Software Development :: Code Generators",
    ],
)

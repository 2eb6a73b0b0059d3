"""
Setup script for archgraph: architecture graphs edited through validated, mergeable deltas
"""

from setuptools import setup, find_packages

setup(
    name="archgraph",
    version="1.0.0",
    description="Architecture graph editing through validated, mergeable deltas",
    long_description="Maintains a versioned architecture graph of software components and applies partial changes drafted by users or language models with integrity-preserving merges",
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src", exclude=["tests*", "docs*", "examples*"]),
    python_requires=">=3.9",
    install_requires=[
        # Core dependencies
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "python-dotenv>=1.0.0",

        # API
        "fastapi>=0.104.0",
        "uvicorn>=0.24.0",

        # Language model providers
        "requests>=2.31.0",
        "google-generativeai>=0.8.5",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
            "httpx>=0.25.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "mypy>=1.0.0",
            "flake8>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "archgraph=archgraph.__main__:main",
        ],
    },
    include_package_data=True,
    author="ArchGraph Team",
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="architecture graph delta merge llm",
)

"""
Setup script for lingopop.

LingoPop is a terminal companion for vocabulary and conversation practice,
driven by a generative model:

1. Dictionary - Look up terms with examples, usage notes and concept images
2. Roleplay - Practice conversations in generated scenarios and get graded
3. Audio - Hear any word or line spoken aloud

The 'lingopop' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="lingopop",
    version="1.0.0",
    description="Generative vocabulary and conversation practice in the terminal",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="LingoPop",
    packages=find_packages(include=["lingopop", "lingopop.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Oracle
        "google-genai>=1.0.0",
        "httpx>=0.25.0",
        # Audio
        "numpy>=1.24.0",
        "sounddevice>=0.4.6",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lingopop=lingopop.cli.main:main",
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
    keywords="language-learning vocabulary roleplay cli education",
)

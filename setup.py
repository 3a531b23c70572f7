"""
Setup script for decodequest.

DecodeQuest personalizes short reading-decoding exercises for a single
learner. The package is the adaptive content engine:

1. Scoring & Mastery - attempt scores, smoothed per-skill mastery, XP
2. Adaptation - per-game difficulty and guessing/error detection
3. Selection - item priority, mixed rounds, and timed missions

The 'decodequest' command is a thin terminal front end over the engine.
"""

from setuptools import find_packages, setup

setup(
    name="decodequest",
    version="1.0.0",
    description="Adaptive content engine for reading-decoding practice",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="DecodeQuest",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
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
            "decodequest=decodequest.cli:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning reading dyslexia phonics adaptive spaced-repetition education",
)

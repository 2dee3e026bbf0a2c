"""
Setup script for entprep.

entprep is the content and statistics engine behind an ENT exam practice
app. It serves three roles:

1. Quiz Supply - Fixed tests, free-form quizzes and exam-layout track quizzes
2. Progress Tracking - Results, running averages, streaks, ranks, achievements
3. Offline Fallback - Local store and procedural generators when the backend is down

The 'entprep' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="entprep",
    version="1.0.0",
    description="ENT practice quiz engine with remote-first, local-fallback access",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="entprep",
    packages=find_packages(include=["entprep", "entprep.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
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
            "entprep=entprep.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Testing",
    ],
    keywords="education quiz exam practice ent cli",
)

# pylint: disable=missing-module-docstring
# ruff: noqa

from pathlib import Path

from setuptools import find_packages, setup


def read_long_description() -> str:
    """Return README contents for PyPI description."""
    readme_path = Path(__file__).with_name("README.md")
    return readme_path.read_text(encoding="utf-8") if readme_path.exists() else "TrendWise"


setup(
    name="trendwise",
    version="0.1.0",
    description="Trend aggregation and AI article generation pipeline",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",
    python_requires=">=3.11",
    packages=find_packages(include=["trendwise", "trendwise.*", "fetchers", "fetchers.*", "generation_engine", "generation_engine.*"]),
    include_package_data=True,
    install_requires=[
        "pydantic>=2.0",
        "httpx>=0.26",
        "python-dotenv>=1.0",
        "openai>=1.0",
        "anthropic>=0.25",
        "apify-client>=1.6",
        "feedparser>=6.0",
        "pandas>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "trendwise-fetch = trendwise.cli_entrypoints:fetch_trends",
            "trendwise-generate = trendwise.cli_entrypoints:generate_articles",
            "trendwise-scheduler = trendwise.scheduler:main",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)

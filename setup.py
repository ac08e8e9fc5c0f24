from pathlib import Path

from setuptools import setup, find_packages

readme = Path(__file__).parent / "README.md"

setup(
    name="trace-collector",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "aiohttp>=3.8.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=0.19.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    python_requires=">=3.10",
    description="Collects throttled and unthrottled page-load traces for a list of URLs",
    long_description=readme.read_text() if readme.exists() else "",
    long_description_content_type="text/markdown",
    entry_points={
        "console_scripts": [
            "collect-traces=trace_collector.services.collector.main:main",
        ],
    },
)

# setup.py
from setuptools import setup, find_packages

setup(
    name="sales-insights",
    version="0.1.0",
    description="Search and monthly sales reports over product transaction records",
    author="Your Name",
    author_email="you@example.com",
    url="https://github.com/yourusername/sales-insights",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=7.0",
        "pyyaml>=5.3",
        "pandas>=1.1",
        "python-dotenv>=0.19",
        "anyio>=3.0",
        "mcp>=1.0,<2",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "sales-insights=sales_insights.cli:main",
            "sales-insights-web=sales_insights.web:main",
            "sales-insights-mcp=sales_insights.mcp_server:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

from setuptools import setup, find_packages

setup(
    name="compensation-analytics",
    version="1.0.0",
    description="Healthcare Compensation Analytics Engine",
    author="Compensation Analytics Team",
    packages=find_packages(include=["compensation_analytics", "compensation_analytics.*"]),
    py_modules=["compensation_cli"],
    install_requires=[
        "pandas>=2.0.0",
        "numpy>=1.24.0",
        "pydantic>=2.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "compensation-cli=compensation_cli:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Healthcare Industry",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)

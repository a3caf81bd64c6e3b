"""
Setup script for the VN Admin Mapping application.
"""

from setuptools import setup, find_packages

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

# Separate development requirements
dev_requirements = [req for req in requirements if any(dev in req for dev in ["pytest", "black", "flake8", "mypy"])]
install_requirements = [req for req in requirements if req not in dev_requirements]

setup(
    name="vn-admin-mapping",
    version="1.0.0",
    author="Data Analytics Team",
    description="Enrich facility records with legacy district and 2025 ward identity",
    long_description="VN Admin Mapping - resolves point-located facilities against the legacy 63-province district system and the reorganized 2025 ward system, and builds diacritic-free alias sets for accent-insensitive search.",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    install_requires=install_requirements,
    extras_require={
        "dev": dev_requirements,
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "vn-admin-mapping=main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)

#!/usr/bin/env python
"""Setup script for fsv-core library."""
from pathlib import Path
from setuptools import setup, find_packages

# 프로젝트 루트 디렉토리
here = Path(__file__).parent.resolve()

# README 읽기
long_description = (here / "README.md").read_text(encoding="utf-8")

version = "0.1.0"

setup(
    name="fsv-core",
    version=version,
    author="YC Math",
    author_email="your-email@example.com",
    description="Native Python values ⇄ Firestore REST typed wire values",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/ycmath/fsv_core",
    project_urls={
        "Bug Tracker": "https://github.com/ycmath/fsv_core/issues",
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="firestore rest encoding serialization",
    packages=find_packages(exclude=["tests", "tests.*", "docs", "examples"]),
    python_requires=">=3.9",

    # 기본 의존성
    install_requires=[
        "numpy>=1.21.0",
        "orjson>=3.8.0",
    ],

    # 선택적 의존성
    extras_require={
        "bench": ["tqdm>=4.65.0"],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
            "hypothesis>=6.0.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "flake8>=4.0.0",
            "mypy>=0.950",
            "tqdm>=4.65.0",
        ],
    },

    # CLI 엔트리 포인트
    entry_points={
        "console_scripts": [
            "fsv=fsv_core.cli:main",
        ],
    },

    include_package_data=True,
    zip_safe=True,
)

# 설치 도움말
if __name__ == "__main__":
    print("\n" + "="*60)
    print("fsv-core 설치 옵션:")
    print("="*60)
    print("기본 설치:           pip install .")
    print("벤치마크(tqdm):      pip install .[bench]")
    print("개발 도구:           pip install .[dev]")
    print("="*60 + "\n")

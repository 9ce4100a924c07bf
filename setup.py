from __future__ import annotations

from setuptools import find_packages, setup

setup(
    name="movie-catalog",
    version="0.1.0",
    # Repo convention: backend code lives under `backend/`, imported as the
    # top-level layer packages (`domain`, `application`, `infrastructure`).
    package_dir={"": "backend"},
    packages=find_packages(
        where="backend",
        include=["domain", "domain.*", "application", "application.*", "infrastructure", "infrastructure.*"],
    ),
    # Seed catalog ships next to the domain code.
    package_data={"domain.catalog": ["*.yaml"]},
    python_requires=">=3.10",
    install_requires=[
        "pydantic==2.10.6",
        "pyyaml>=6.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        # Optional: Redis-backed blob store (CATALOG_STORE_BACKEND=redis).
        "redis": ["redis>=5.0"],
        "test": ["pytest>=8.0"],
        # Convenience: all optional deps.
        "full": ["redis>=5.0"],
    },
    entry_points={
        "console_scripts": [
            "movie-catalog=infrastructure.integrations.catalog_admin.main:main",
        ],
    },
)

import re
import sys
from pathlib import Path

from setuptools import find_packages, setup


def read_reqs(reqs_path: Path) -> set[str]:
    return {
        r
        for r in re.findall(
            r"(^[^#\n-][\w\[,\]]+[-~>=<.\w]*)",
            reqs_path.read_text(),
            re.MULTILINE,
        )
        if isinstance(r, str)
    }


CURRENT_DIR = Path(sys.argv[0] if __name__ == "__main__" else __file__).resolve().parent


# WEAK requirements
PROD_REQUIREMENTS = read_reqs(CURRENT_DIR / "requirements" / "_base.in")

# STRONG requirements
TEST_REQUIREMENTS = read_reqs(CURRENT_DIR / "requirements" / "_test.txt")


SETUP = {
    "author": "tracing-factory maintainers",
    "description": "Factories building OpenTelemetry tracing from declarative configuration",
    "classifiers": [
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Programming Language :: Python :: 3.11",
    ],
    "extras_require": {
        "test": tuple(TEST_REQUIREMENTS),
    },
    "install_requires": tuple(PROD_REQUIREMENTS),
    "license": "MIT license",
    "long_description": Path(CURRENT_DIR / "README.md").read_text(),
    "long_description_content_type": "text/markdown",
    "name": "tracing-factory",
    "package_dir": {"": "src"},
    "packages": find_packages(where="src"),
    "python_requires": ">=3.11",
    "test_suite": "tests",
    "tests_require": tuple(TEST_REQUIREMENTS),
    "version": Path(CURRENT_DIR / "VERSION").read_text().strip(),
    "zip_safe": False,
}


if __name__ == "__main__":
    setup(**SETUP)

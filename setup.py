# Copyright © 2025 Leadpoet

import re
import os
import codecs
from os import path
from io import open
from setuptools import setup, find_packages


here = path.abspath(path.dirname(__file__))

with open(path.join(here, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

with codecs.open(os.path.join(here, "enrichment_core/__init__.py"), encoding="utf-8") as init_file:
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", init_file.read(), re.M)
    if not version_match:
        raise RuntimeError("Unable to find version string in enrichment_core/__init__.py")
    version_string = version_match.group(1)


requirements = [
    # HTTP and networking
    "httpx>=0.27.0",

    # Monitoring and metrics
    "prometheus_client>=0.19.0",

    # Environment and configuration
    "python-dotenv>=1.0.0",
    "pydantic>=2.0.0",
    "pydantic-settings>=2.0.0",
]

test_requirements = [
    "pytest>=8.0.0",
    "pytest-cov>=4.1.0",
    "pytest-asyncio>=0.21.0",
]

setup(
    name="enrichment_core",
    version=version_string,
    description="Multi-source enrichment orchestration and intelligence scoring for lead generation",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/leadpoet/leadpoet",
    author="Leadpoet",
    author_email="hello@leadpoet.com",
    license="MIT",
    packages=find_packages(include=['enrichment_core', 'enrichment_core.*']),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={"test": test_requirements},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Topic :: Internet :: WWW/HTTP",
    ],
)

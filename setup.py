from setuptools import setup, find_packages
from pathlib import Path


def read_readme():
    this_directory = Path(__file__).parent
    readme_file = this_directory / 'README.md'
    if readme_file.exists():
        return readme_file.read_text(encoding='utf-8')
    return ""


def get_version():
    import re
    init_file = Path(__file__).parent / 'store_gke_config' / '__init__.py'
    if init_file.exists():
        content = init_file.read_text()
        match = re.search(r'__version__\s*=\s*["\']([^"\']+)["\']', content)
        if match:
            return match.group(1)
    return "0.1.0"


setup(
    name="store-gke-config",
    version=get_version(),
    author="NoETL Team",
    description="Workflow tool that stores GKE cluster credentials as step output.",
    long_description=read_readme(),
    long_description_content_type='text/markdown',
    packages=find_packages(include=['store_gke_config', 'store_gke_config.*']),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "kubernetes>=28.1.0",
        "pydantic>=2.5",
        "Jinja2>=3.1",
        "httpx>=0.25",
        "PyYAML>=6.0",
        "typer>=0.16",
    ],
    extras_require={
        'test': [
            "pytest>=7.4",
            "click>=8.2",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: System :: Systems Administration",
    ],
    keywords="workflow pipeline gke kubernetes kubeconfig gcloud",
    entry_points={
        'console_scripts': [
            'store-gke-config=store_gke_config.cli:cli_app',
        ],
    },
)

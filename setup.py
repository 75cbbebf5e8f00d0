from setuptools import setup, find_namespace_packages

setup(
    name="gitlab-auth-bridge",
    version="1.0.0",
    description="Authenticate users of a host application against a GitLab server",
    author="Your Name",
    author_email="your.email@example.com",
    packages=find_namespace_packages(include=["gitlab_auth", "gitlab_auth.*"]),
    py_modules=["run_auth_check"],
    install_requires=[
        "python-gitlab>=4.0.0",
        "requests>=2.25.0",
        "python-dotenv>=0.19.0"
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=22.0.0",
            "flake8>=4.0.0",
            "mypy>=1.0.0"
        ]
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "gitlab-auth-check=run_auth_check:main"
        ]
    }
)

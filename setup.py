from setuptools import setup, find_packages

setup(
    name="visaportal",
    version="0.1.0",
    packages=find_packages(include=["visaportal", "visaportal.*", "cms", "cms.*", "ai_blog", "ai_blog.*"]),
    include_package_data=True,
    install_requires=[
        "Django>=4.2",
        "djangorestframework>=3.14",
        "django-cors-headers>=4.0",
        "whitenoise>=6.5",
        "python-dotenv>=1.0",
        "openai>=1.0",
        "requests>=2.31",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-django>=4.5",
        ],
    },
    author="Wayne",
    author_email="support@techwithwayne.com",
    description="AI blog pipeline for a visa consultancy site: topic plans, article generation, publishing.",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    url="https://techwithwayne.com",
    license="MIT",
    classifiers=[
        "Framework :: Django",
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "License :: OSI Approved :: MIT License"
    ],
    python_requires='>=3.9',
)

"""
leakprobe setup.py

leakprobeパッケージのインストール設定
"""

from setuptools import setup, find_packages

# READMEファイルを読み込み


def read_readme():
    with open('README.md', 'r', encoding='utf-8') as f:
        return f.read()

# requirements.txtを読み込み


def read_requirements():
    with open('requirements.txt', 'r', encoding='utf-8') as f:
        return [line.strip() for line in f.readlines()
                if line.strip() and not line.startswith('#')]


setup(
    name='leakprobe',
    version='0.1.0',
    author='Pochi Team',
    author_email='pochi@example.com',
    description='Repeated sync inference against an identity model over HTTP or gRPC',
    long_description=read_readme(),
    long_description_content_type='text/markdown',
    url='https://github.com/pochi-team/leakprobe',
    packages=find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Software Development :: Testing',
        'Topic :: System :: Networking',
    ],
    keywords='triton, inference, grpc, http, memory leak, client',
    python_requires='>=3.10',
    install_requires=read_requirements(),
    extras_require={
        'dev': [
            'pytest>=6.0.0',
            'flake8>=3.8.0',
            'black>=21.0.0',
            'isort>=5.8.0',
            'pydocstyle>=6.0.0',
            'pre-commit>=2.12.0'
        ]
    },
    entry_points={
        'console_scripts': [
            'leakprobe=leakprobe.cli.probe:main',
        ],
    },
    include_package_data=True,
    zip_safe=False,
)

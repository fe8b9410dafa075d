from setuptools import setup

setup(
    name='tcpecho',
    version='1.0',
    packages=['tcpecho', 'tcpecho.io', 'tcpecho.test'],
    license='GPL v3.0',
    description='A restartable TCP echo server and reconnecting client',
    python_requires='>=3.8',
    install_requires=['blinker'],
    extras_require={
        'test': ['pytest']
    },
    entry_points={
        'console_scripts': [
            'tcpecho-server = tcpecho.console:server_main',
            'tcpecho-client = tcpecho.console:client_main',
        ]
    }
)

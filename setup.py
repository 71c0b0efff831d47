from setuptools import setup

setup(
    name='wifi-console',
    version='1.0.0',
    description='Wi-Fi operator console',
    long_description='Interactive console for scanning, connecting to and managing Wi-Fi networks through NetworkManager',
    author='Ferenc Nandor Janky & Attila Gombos',
    author_email='info@effective-range.com',
    maintainer='Ferenc Nandor Janky & Attila Gombos',
    maintainer_email='info@effective-range.com',
    packages=['wifi_model', 'wifi_event', 'wifi_dbus', 'wifi_station', 'wifi_console'],
    scripts=['bin/wifi-console.py'],
    data_files=[
        ('config', ['config/wifi-console.conf.default']),
    ],
    install_requires=[
        'PyGObject==3.50.0',
        'pygobject-stubs',
        'python-context-logger@git+https://github.com/EffectiveRange/python-context-logger.git@latest',
        'python-common-utility@git+https://github.com/EffectiveRange/python-common-utility.git@latest',
    ],
    extras_require={
        'test': [
            'parameterized',
            'pytest',
        ],
    },
)

from setuptools import setup

setup(
    name='paymentplan',
    version='1.0.0',
    description='Installment payment plan calculation for consumer credit',
    author='Inco',
    author_email='dev@inco.vc',
    url='https://github.com/inco-org/paymentplan',
    py_modules=['paymentplan'],
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: Other/Proprietary License',
        'Operating System :: OS Independent',
    ],
    install_requires=['typeguard', 'python-dateutil', 'scipy'],
    extras_require={'test': ['pytest']},
    python_requires='>=3.9'
)

"""
Packaging script for PyPI.
"""
import os, setuptools

setuptools.setup(
	name='ucl-lang',
	author='UCL Contributors',
	version='0.1.0',
	packages=['ucl', "ucl.backends", ],
	package_data={
		'ucl': ["knowledge/"+f for f in os.listdir("ucl/knowledge")],
	},
	entry_points={
		'console_scripts': ["ucl = ucl.cmdline:main"],
	},
	license='MIT',
	description='An interpreter for the Universal Causal Language, in which programs are sequences of actions that actors perform on targets',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.9",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Intended Audience :: Education",
		"Topic :: Software Development :: Interpreters",
		"Topic :: Software Development :: Code Generators",
		"Environment :: Console",
    ],
	python_requires='>=3.9',
	install_requires=[
		"booze-tools>=0.6.2.1",
	]
)

"""
Worker module.
Contains the worker loop, the worker directory and the job handler registry.
"""

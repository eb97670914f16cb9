"""
Distributed Background Job Processor

Workers reserve jobs from named Redis queues in strict priority order, record
outcomes and failures, and register themselves in a shared worker directory
that is pruned of crashed peers on every startup.
"""

__version__ = "1.0.0"

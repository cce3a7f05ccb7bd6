"""
Script contains functions for threading
"""

from concurrent import futures


class ThreadExecutor:
    """
    Class to handle threading
    """
    def __init__(self, max_workers, name):
        if max_workers < 1:
            raise ValueError(f"{name}: max_workers must be at least 1")
        self.name = name
        self.executor = futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=name
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.shutdown()

    def shutdown(self):
        self.executor.shutdown(wait=True)

    def submit(self, fn, *args, **kwargs):
        return self.executor.submit(fn, *args, **kwargs)


def wait_any(futures_iter):
    """Block until at least one future finishes; returns ``(done, not_done)``."""
    return futures.wait(futures_iter, return_when=futures.FIRST_COMPLETED)

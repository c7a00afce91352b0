from . import io_rows, reassemble, sinks

__all__ = ["io_rows", "reassemble", "sinks"]

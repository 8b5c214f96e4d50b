"""Process invocation adapters."""

from arcsigns.adapters.process.asyncio_invoker import AsyncioProcessInvoker

__all__ = ["AsyncioProcessInvoker"]

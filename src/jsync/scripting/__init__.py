"""
Helpers for commands and scripts that drive a JSyncCache.

The core library never configures logging and always raises typed
errors. Commands, instead, want readable logs on the standard error
and an exit code that reflects whether every group synced. The
modules in this package provide both and are imported on demand:

    from jsync.scripting import jsync_exception, jsync_logging

    jsync_logging.configure(verbose=False)
    interceptor = jsync_exception.Interceptor()
    for group in groups:
        with interceptor:
            cache.sync(group)
    raise SystemExit(interceptor.exitcode())
"""

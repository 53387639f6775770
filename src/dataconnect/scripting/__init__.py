"""
Support for writing scripts using the DataConnect client.

The expected usage of core DataConnect types is like:

    from dataconnect import DataConnectClient

However, the scripting package is not part of the core
client library, and contains extensions.

Therefore, the expected usage is as follows:

    from dataconnect.scripting import dc_logging

That is, each module whose name starts with `dc_` in this
package is an independent extension module you may want
to optionally load for writing DataConnect based scripts.
"""

"""Gateway implementations of the ports."""

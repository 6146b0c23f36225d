"""Adapters — bindings between the engine and the calling shell."""

"""unity-yaml command line interface.

Thin click layer over :mod:`unity_yaml_editor.core.editor`; every command
emits a response-v2 envelope.
"""

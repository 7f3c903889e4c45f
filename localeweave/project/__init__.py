"""
Project files module

Reads source locale files and writes translated ones (JSON and YAML).
"""

from localeweave.project.files import FileHandler, JsonFileHandler, YamlFileHandler, get_file_handler

__all__ = ['FileHandler', 'JsonFileHandler', 'YamlFileHandler', 'get_file_handler']

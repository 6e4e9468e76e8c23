# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
promptloom — tooling for chat-mode, instruction and prompt document corpora.
"""

__version__ = "0.1.0"

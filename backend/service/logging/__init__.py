"""
Session Logging Module

Provides per-editing-session event logging for the workflow editor.
"""
from service.logging.session_logger import SessionLogger, get_session_logger, remove_session_logger

__all__ = ['SessionLogger', 'get_session_logger', 'remove_session_logger']

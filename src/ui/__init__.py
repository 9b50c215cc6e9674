"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Session sidebar with switching, creation and deletion
    - Message list with markdown rendering and streaming updates
    - Input lockout while an exchange is in flight

Implements the ChatView drawing surface. All state decisions live in
src.chat.
"""

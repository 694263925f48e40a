"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
"""

APP_CSS = """
/* Chat on the left, reasoning/notes/log on the right, input below */
Screen {
    layout: grid;
    grid-size: 2 2;
    grid-columns: 3fr 2fr;
    grid-rows: 1fr auto;
    background: $background;
}

#chat-history {
    height: 100%;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

#chat-history.-maximized {
    column-span: 2;
}

#side-panel {
    height: 100%;
}

#reasoning-panel, #notes-panel, #debug-panel {
    background: $panel;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
}

#reasoning-panel {
    height: auto;
    min-height: 4;
    border: round $secondary 60%;
    border-title-color: $secondary;

    &.thinking {
        border: round $accent;
        border-title-color: $accent;
    }
}

#notes-panel {
    height: 1fr;
    border: round $success 60%;
    border-title-color: $success;
    overflow-y: auto;
}

#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 14;
    border: round $warning 60%;
    border-title-color: $warning;
    overflow-y: scroll;
    overflow-x: auto;
}

#bottom-bar {
    column-span: 2;
    height: auto;
    padding: 0 1;
    background: $panel;
    border-top: solid $border;
}

#status-bar {
    height: 1;
    padding: 0 1;
    background: $surface;
}

ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    border: tall $success;
    background: $success;
    color: $background;
    text-style: bold;
}

.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 1 2;
}

.user-message {
    border-left: tall $success;
    background: $success 8%;

    & .message-header {
        color: $success;
    }
}

.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
    }
}

.error-message {
    border-left: tall $error;
    background: $error 8%;
}

.message-header {
    text-style: bold;
    height: auto;
}

.message-content, .attachment-info {
    height: auto;
    margin: 0 0 1 0;
}

.code-block {
    height: auto;
    margin: 0 0 1 0;

    &:hover {
        background: $primary 10%;
    }
}

.disclosure {
    height: auto;
}

.disclosure-toggle {
    height: 1;
    min-width: 18;
    border: none;
    background: $secondary 20%;
    color: $secondary;
}

.disclosure-steps {
    height: auto;
    padding: 0 2;
    color: $text-muted;
}

.chat-notice {
    height: auto;
    margin: 0 0 1 0;
    color: $text-muted;
    text-style: italic;
}

Toast {
    background: $surface;
    border: tall $border;

    &.-error {
        border: tall $error;
    }

    &.-warning {
        border: tall $warning;
    }
}

* {
    scrollbar-size: 1 1;
}
"""

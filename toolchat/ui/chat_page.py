"""NiceGUI chat interface with SSE streaming and tool status."""

import html
import os
import re
from functools import partial

import httpx
from nicegui import app, ui

from toolchat.client.consumer import StreamConsumer
from toolchat.client.sse import stream_chat
from toolchat.client.storage import MAX_TOKENS, Session, SessionStore
from toolchat.config import get_server_config

SYSTEM_PROMPT = os.getenv(
    "CHAT_SYSTEM_PROMPT",
    "You are a personal AI assistant. Be skeptical, objective, and use few words. "
    "Get to the point.",
)
STREAM_TIMEOUT = httpx.Timeout(120.0, read=300.0)


def markdown_to_html(text: str) -> str:
    """Convert markdown to HTML for chat display.

    Supports: bold, italic, inline code, code blocks, links, lists.
    """
    # Escape HTML entities first
    text = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")

    # Code blocks (```code```)
    text = re.sub(
        r"```(\w*)\n?([\s\S]*?)```",
        r'<pre class="code-block rounded-lg p-3 my-2 overflow-x-auto text-xs"><code>\2</code></pre>',
        text,
    )

    # Inline code (`code`)
    text = re.sub(
        r"`([^`]+)`",
        r'<code class="inline-code px-1.5 py-0.5 rounded text-xs">\1</code>',
        text,
    )

    # Bold (**text** or __text__)
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"__(.+?)__", r"<strong>\1</strong>", text)

    # Italic (*text* or _text_)
    text = re.sub(r"\*([^*\n]+)\*", r"<em>\1</em>", text)
    text = re.sub(r"\b_([^_\n]+)_\b", r"<em>\1</em>", text)

    # Links [text](url)
    text = re.sub(
        r"\[([^\]]+)\]\(([^)]+)\)",
        r'<a href="\2" class="underline" target="_blank">\1</a>',
        text,
    )

    text = _wrap_list_items(text, r"^[-*]\s+", "ul", "list-disc")
    text = _wrap_list_items(text, r"^\d+\.\s+", "ol", "list-decimal")

    # Line breaks (preserve newlines as <br>)
    return text.replace("\n", "<br>")


def _wrap_list_items(text: str, marker: str, tag: str, style: str) -> str:
    lines = text.split("\n")
    in_list = False
    result = []
    for line in lines:
        stripped = line.strip()
        if re.match(marker, stripped):
            if not in_list:
                result.append(f'<{tag} class="{style} list-inside my-2 space-y-1">')
                in_list = True
            result.append(f"<li>{re.sub(marker, '', stripped)}</li>")
        else:
            if in_list:
                result.append(f"</{tag}>")
                in_list = False
            result.append(line)
    if in_list:
        result.append(f"</{tag}>")
    return "\n".join(result)


CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    .message-user {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }
    .body--dark .message-assistant { background: #1f2937; color: #e5e7eb; }

    .session-item { border-radius: 8px; cursor: pointer; }
    .session-item:hover { background: rgba(102, 126, 234, 0.12); }
    .session-active { background: rgba(102, 126, 234, 0.22); }

    .typing-dot {
        width: 8px; height: 8px;
        background: #667eea;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .send-btn { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%) !important; }

    .code-block { background: #1f2937; color: #f3f4f6; }
    .inline-code { background: rgba(127, 127, 127, 0.2); }
    .message-assistant strong { font-weight: 600; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
</style>
"""


def format_tokens(token_count: int) -> str:
    """Header label for context usage, e.g. ``1,234 / 200,000 tokens (1%)``."""
    percent = round(token_count / MAX_TOKENS * 100)
    return f"{token_count:,} / {MAX_TOKENS:,} tokens ({percent}%)"


@ui.page("/")
@ui.page("/index.html")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)

    api_base_url = get_server_config().resolved_api_base_url()
    store = SessionStore(app.storage.user)
    sessions, current = store.initialize()
    dark = ui.dark_mode(value=store.load_theme() == "dark")

    # Per-session exchange state; several sessions may stream at once
    loading: set[str] = set()
    streaming: dict[str, str] = {}
    unread: set[str] = set()

    sidebar: ui.column
    header_title: ui.label
    header_tokens: ui.label
    messages_container: ui.column
    input_field: ui.textarea
    send_btn: ui.button
    live_label: ui.html | None = None

    def persist() -> None:
        store.save_sessions(sessions)
        store.save_current_session_id(current.id)

    def replace_session(updated: Session) -> None:
        nonlocal sessions, current
        sessions = [updated if s.id == updated.id else s for s in sessions]
        if current.id == updated.id:
            current = updated
        persist()

    def render_message(role: str, content: str) -> ui.html:
        is_user = role == "user"
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"
        with ui.row().classes(f"w-full {align}"):
            with ui.element("div").classes(f"max-w-[75%] px-4 py-3 {bubble}"):
                return ui.html(content, sanitize=False).classes("text-sm leading-relaxed")

    def render_typing() -> None:
        with ui.row().classes("w-full justify-start"):
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("gap-1"):
                    for _ in range(3):
                        ui.element("div").classes("typing-dot")

    def refresh_header() -> None:
        header_title.set_text(current.title)
        header_tokens.set_text(format_tokens(current.token_count))

    def refresh_messages() -> None:
        nonlocal live_label
        live_label = None
        messages_container.clear()
        with messages_container:
            if not current.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-400")
                    ui.label("Start a conversation").classes("text-lg text-gray-400")
            for msg in current.messages:
                if msg.role == "user":
                    render_message("user", html.escape(msg.content).replace("\n", "<br>"))
                else:
                    render_message("assistant", markdown_to_html(msg.content))
            if current.id in loading:
                view = streaming.get(current.id, "")
                if view:
                    live_label = render_message("assistant", markdown_to_html(view))
                else:
                    render_typing()

    def refresh_sidebar() -> None:
        sidebar.clear()
        with sidebar:
            for session in sessions:
                active = "session-active" if session.id == current.id else ""
                with ui.row().classes(
                    f"w-full items-center gap-2 px-3 py-2 session-item {active}"
                ).on("click", partial(select_session, session.id)):
                    if session.id in loading:
                        ui.spinner(size="xs")
                    elif session.id in unread:
                        ui.icon("circle").classes("text-[8px] text-indigo-400")
                    ui.label(session.title).classes("flex-grow text-sm truncate")
                    ui.button(icon="delete").props("flat round dense size=sm").on(
                        "click.stop", partial(delete_session, session.id)
                    )

    def refresh_input() -> None:
        if current.id in loading:
            send_btn.disable()
        else:
            send_btn.enable()

    def refresh_all() -> None:
        refresh_header()
        refresh_sidebar()
        refresh_messages()
        refresh_input()

    def select_session(session_id: str) -> None:
        nonlocal current
        session = next((s for s in sessions if s.id == session_id), None)
        if session is None:
            return
        current = session
        unread.discard(session_id)
        persist()
        refresh_all()

    def new_session() -> None:
        nonlocal sessions, current
        current = Session()
        sessions = [current, *sessions]
        persist()
        refresh_all()

    def delete_session(session_id: str) -> None:
        nonlocal sessions, current
        sessions = [s for s in sessions if s.id != session_id]
        if current.id == session_id:
            if sessions:
                current = sessions[0]
            else:
                current = Session()
                sessions = [current]
        persist()
        refresh_all()

    def toggle_theme() -> None:
        dark.toggle()
        store.save_theme("dark" if dark.value else "light")

    async def send_message() -> None:
        text = (input_field.value or "").strip()
        if not text or current.id in loading:
            return

        input_field.value = ""
        session = current.with_user_message(text)
        session_id = session.id
        replace_session(session)
        loading.add(session_id)
        streaming[session_id] = ""
        refresh_all()

        def on_update(view: str) -> None:
            streaming[session_id] = view
            if current.id != session_id:
                return
            if live_label is None:
                refresh_messages()
            else:
                live_label.set_content(markdown_to_html(view))

        consumer = StreamConsumer(on_update=on_update)
        try:
            async with httpx.AsyncClient(base_url=api_base_url, timeout=STREAM_TIMEOUT) as client:
                result = await consumer.consume(
                    stream_chat(client, session.messages, SYSTEM_PROMPT, session_id=session_id)
                )
        finally:
            loading.discard(session_id)
            streaming.pop(session_id, None)

        latest = next((s for s in sessions if s.id == session_id), None)
        if latest is not None:
            replace_session(latest.with_result(result))
            if current.id != session_id:
                unread.add(session_id)
        if result.failed:
            ui.notify(result.error, type="negative")
        refresh_all()

    # === UI Layout ===
    with ui.left_drawer(value=True).classes("p-3 gap-2").props("width=260 bordered"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.button("New chat", icon="add", on_click=new_session).props("flat no-caps")
            ui.button(icon="contrast", on_click=toggle_theme).props("flat round")
        sidebar = ui.column().classes("w-full gap-1")

    with ui.header().classes("items-center justify-between px-5 py-3"):
        header_title = ui.label().classes("text-lg font-semibold truncate")
        header_tokens = ui.label().classes("text-xs opacity-80 font-mono")

    with ui.column().classes("w-full max-w-3xl mx-auto").style("height: calc(100vh - 8rem)"):
        with ui.scroll_area().classes("flex-grow w-full"):
            messages_container = ui.column().classes("w-full gap-4 p-4")

        with ui.row().classes("w-full p-2 gap-3 items-end"):
            input_field = (
                ui.textarea(placeholder="Type a message...")
                .props("autogrow outlined dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send_message)
            )
            send_btn = (
                ui.button(icon="send", on_click=send_message)
                .props("round unelevated")
                .classes("send-btn")
            )

    refresh_all()


def main(port: int | None = None, storage_secret: str | None = None) -> None:
    """Serve the chat page on its own, talking to a separately running API."""
    config = get_server_config()
    ui.run(
        title="toolchat",
        port=port or config.ui_port,
        reload=False,
        storage_secret=storage_secret or config.storage_secret,
    )


if __name__ == "__main__":
    main()

"""系统上下文加载工具。

按人设(persona)与语言(locale) 从 prompts/<locale>/ 目录读取固定文本：

- donor_assistant: 捐赠者聊天助手的系统上下文。
- donor_assistant_greeting: 聊天窗口打开时的欢迎语。
- content_writer: 管理后台内容工作室的文案人设。
"""

from pathlib import Path

from relay_core.domain.exceptions import ValidationError


PROMPTS_DIR = Path(__file__).resolve().parent

PERSONAS = ("donor_assistant", "donor_assistant_greeting", "content_writer")


def load_system_context(persona: str, locale: str = "en") -> str:
    """根据人设和语言加载文本，去掉文件末尾的换行。"""

    if persona not in PERSONAS:
        raise ValidationError(code="UNKNOWN_PERSONA", message=f"Unknown persona: {persona!r}")
    fname = PROMPTS_DIR / locale / f"{persona}.md"
    if not fname.exists():
        raise ValidationError(code="UNKNOWN_LOCALE", message=f"No {persona!r} text for locale {locale!r}")
    return fname.read_text(encoding="utf-8").rstrip("\n")

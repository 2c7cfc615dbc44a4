"""系统提示词加载工具。

按人设(persona)与语言(locale) 从 prompts/<locale> 目录读取
system prompt 模板，模板中的 [name] 占位符由编排层替换为用户名。
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent


def load_system_prompt(persona: str = "akeno", locale: str = "en") -> str:
    """根据人设和语言加载系统提示词模板文本。"""

    fname = PROMPTS_DIR / locale / f"{persona}_system.md"
    return fname.read_text(encoding="utf-8").strip()


def render_system_prompt(template: str, display_name: str, placeholder: str = "[name]") -> str:
    """把模板中的占位符替换为用户显示名；模板不含占位符时原样返回。"""

    if not placeholder or placeholder not in template:
        return template
    return template.replace(placeholder, display_name)

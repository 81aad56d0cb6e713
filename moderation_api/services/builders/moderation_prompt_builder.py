import os
from google.genai import types
from jinja2 import Environment, FileSystemLoader, StrictUndefined

PROMPT_DIR = os.path.join(os.path.dirname(__file__), '..', 'prompts')
prompt_env = Environment(loader=FileSystemLoader(PROMPT_DIR), undefined=StrictUndefined)

def build_system_instruction() -> str:
    """Safety instruction asking the model for a {safe, reason} JSON verdict"""
    template = prompt_env.get_template("safety_instruction.j2")
    return template.render(safe_field="safe", reason_field="reason").strip()

def build_user_contents(user_content: str) -> list:
    return [types.Content(role="user", parts=[types.Part(text=user_content)])]

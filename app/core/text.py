import re

def extract_json(text: str) -> str:
    text = (text or "").strip()
    if text.startswith("{") and text.endswith("}"):
        return text
    m = re.search(r"\{.*\}", text, flags=re.DOTALL)
    if not m:
        raise ValueError("No JSON object found in model output")
    return m.group(0)


def extract_json_array(text: str) -> str:
    text = (text or "").strip()
    if text.startswith("[") and text.endswith("]"):
        return text
    m = re.search(r"\[.*\]", text, flags=re.DOTALL)
    if not m:
        raise ValueError("No JSON array found in model output")
    return m.group(0)


def format_ingredient_name(name: str) -> str:
    # "tOMATO " -> "Tomato"
    name = " ".join(name.strip().split())
    return name[:1].upper() + name[1:].lower()

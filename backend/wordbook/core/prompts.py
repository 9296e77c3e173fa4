from textwrap import dedent

WORD_PROMPT = dedent(
    """
    请解释单词 "{word}"。
    请返回且仅返回一个纯 JSON 格式的字符串，不要包含 Markdown 标记。
    JSON 格式要求如下：
    {{
      "word": "{word}",
      "meaning": "中文释义",
      "example": "一句英文例句",
      "ukPhonetic": "英式音标(IPA)",
      "usPhonetic": "美式音标(IPA)"
    }}
    """
).strip()

# Stored instead of generated content so the user's word is never lost
CONFIG_ERROR_DEFINITION = "配置错误"
CONFIG_ERROR_EXAMPLE = "未配置 AI 服务的 API Key，暂时无法生成释义。"

GENERATION_FAILED_DEFINITION = "AI 生成失败"
GENERATION_FAILED_EXAMPLE = "AI 服务暂时不可用，请稍后重试。"


def build_word_prompt(word: str) -> str:
    return WORD_PROMPT.format(word=word)

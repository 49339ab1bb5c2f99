"""
常量定义

集中管理冷却时长、候选端点、Gemini 默认值等常量。
"""


class DispatchDefaults:
    """动作调度默认值"""

    # 每次触发后的冷却时长（毫秒）
    COOLDOWN_MS = 10_000
    # 冷却倒计时刷新间隔（毫秒）
    TICK_INTERVAL_MS = 100


class EndpointDefaults:
    """绘图服务端点默认值"""

    FUNCTION_PATH = "/.netlify/functions/analyze-drawing"

    # 本地开发端口，按优先级排列：dev 代理、functions:serve、备用 dev 代理
    LOCAL_FUNCTION_PORTS: tuple[int, ...] = (8888, 9999, 8889)

    LOOPBACK_HOSTS: tuple[str, ...] = ("localhost", "127.0.0.1")


class GeminiDefaults:
    """Gemini 上游默认值"""

    BASE_URL = "https://generativelanguage.googleapis.com"
    ANALYZE_MODEL = "gemini-2.5-flash"
    ENHANCE_MODEL = "gemini-2.5-flash-image"

    ENHANCE_PROMPT = (
        "You are a professional illustrator. Transform the provided sketch into a polished, "
        "realistic or artistically stylized image while preserving the subject, proportions, "
        "and core shapes. Keep the background clean with subtle depth, avoid text or captions, "
        "and deliver a single finished artwork ready for saving."
    )
    ANALYZE_PROMPT = (
        "You are a playful art critic. Look at this hand-drawn sketch and say in one or two "
        "short sentences what you think it depicts."
    )

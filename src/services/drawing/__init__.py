from src.services.drawing.action import create_drawing_client, create_drawing_dispatcher
from src.services.drawing.gemini_service import GeminiDrawingService

__all__ = ["GeminiDrawingService", "create_drawing_client", "create_drawing_dispatcher"]

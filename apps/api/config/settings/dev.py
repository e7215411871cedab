from .base import *

DEBUG = True
ALLOWED_HOSTS = ["*"]

# 로컬 프론트 (vite / next) 허용
CORS_ALLOW_ALL_ORIGINS = True

# 🔴 base 설정 유지 + 브라우저 세션 인증만 추가 (admin에서 API 확인용)
REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"] = [
    "rest_framework.authentication.SessionAuthentication",
    "rest_framework_simplejwt.authentication.JWTAuthentication",
]

LOGGING["loggers"] = {
    "academy": {"level": "DEBUG"},
}

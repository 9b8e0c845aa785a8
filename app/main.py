"""应用入口：装配当前启用的业务包，创建 FastAPI 实例。"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.middleware.request_id import RequestIdMiddleware
from app.packages import get_active_package

package = get_active_package()
package.setup_logging()
settings = package.get_settings()
logger = package.logger

app = FastAPI(title=settings.project_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(RequestIdMiddleware)

for exc_class, handler in package.exception_handlers.items():
    app.add_exception_handler(exc_class, handler)


@app.on_event("startup")
async def startup_event() -> None:
    """确保表结构存在后输出启动日志。"""
    package.init_db()
    logger.info("SUCCESS - %s running at http://127.0.0.1:%s", package.name, settings.app_port)


@app.get("/health")
async def health_check() -> dict:
    return package.create_response("OK", {"status": "healthy", "package": package.name})


app.include_router(package.api_router, prefix=settings.api_v1_str)

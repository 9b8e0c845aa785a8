"""常量定义：HTTP 状态码与目录树相关的固定取值。"""

HTTP_STATUS_OK = 200
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_UNAUTHORIZED = 401
HTTP_STATUS_NOT_FOUND = 404
HTTP_STATUS_CONFLICT = 409
HTTP_STATUS_PRECONDITION_FAILED = 412
HTTP_STATUS_INTERNAL_SERVER_ERROR = 500

ACCESS_TOKEN_TYPE = "bearer"

# 虚拟根容器：不入库，按需合成
VIRTUAL_ROOT_ID = 0
VIRTUAL_ROOT_PATH = "/"

# 单个路径段（容器名）与物品名的最大长度，与模型列宽保持一致
MAX_SEGMENT_LENGTH = 256

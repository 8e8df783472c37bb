"""Provider 抽象接口。

RequestPipeline 不直接依赖具体厂商的请求格式，而是依赖此协议：

- build_request: 把配置 + prompt 转成 ProviderRequest（端点、请求头、请求体）。
- send: 发送请求，返回状态码与解析后的响应体。
- extract_text: 从成功响应体中取出回复文本。

HTTP 类 Provider 继承 HttpProviderAdapter，只需实现 build_request/extract_text。
"""

from typing import Any, Dict, Optional, Protocol

import httpx

from note_agent.config.settings import AgentSettings
from note_agent.domain.exceptions import TransportError
from note_agent.domain.models import ProviderRequest, ProviderResponse


class ProviderAdapter(Protocol):
    """Provider 适配器协议。

    实现者需要提供：
    - name: Provider 名称，用于日志。
    - build_request / send / extract_text，语义见模块说明。
    """

    name: str

    def build_request(self, settings: AgentSettings, prompt: str) -> ProviderRequest:
        ...

    async def send(self, client: httpx.AsyncClient, request: ProviderRequest) -> ProviderResponse:
        ...

    def extract_text(self, body: Any) -> str:
        ...


def json_headers(api_key: Optional[str] = None) -> Dict[str, str]:
    """JSON 请求头；有 key 时附带 Bearer 认证，无 key 时省略（部分后端无需认证）。"""

    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


class HttpProviderAdapter:
    """以 JSON POST 方式调用的 Provider 公共实现。"""

    name = "http"

    async def send(self, client: httpx.AsyncClient, request: ProviderRequest) -> ProviderResponse:
        try:
            resp = await client.post(request.url, json=request.body, headers=request.headers)
        except httpx.HTTPError as e:
            # 网络错误：DNS 失败、连接超时等
            raise TransportError(code="NETWORK_ERROR", message=str(e) or type(e).__name__, provider=self.name)
        if not resp.is_success:
            return ProviderResponse(status_code=resp.status_code, body=resp.text)
        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(
                code="MALFORMED_RESPONSE",
                message=f"Malformed response body: {e}",
                provider=self.name,
            )
        return ProviderResponse(status_code=resp.status_code, body=data)

from __future__ import annotations

import logging
import os
from time import sleep

import httpx

from tradenavi.core.config import get_http_timeout

logger = logging.getLogger(__name__)

# Discord 单条消息上限 2000 字符
_MAX_CONTENT = 2000


class DiscordClient:
    """
    Discord Webhook 客户端。

    职责：发送文本消息到 Discord Webhook。

    说明：
    - 使用 httpx 同步 Client，支持超时与有限重试（指数退避）；
    - 5xx/429 视为可重试错误，其它非 2xx 直接返回失败；
    - 网络异常不向上抛出，返回 False 由调用方决定如何提示。
    """

    def __init__(
        self,
        webhook_url: str | None = None,
        *,
        timeout: float | None = None,
        retries: int = 2,
        backoff_base: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        初始化发送器。

        Args:
            webhook_url: 可显式传入 Webhook 地址；为空时从环境变量读取。
            timeout: 单次请求超时（秒），默认读取 HTTP_TIMEOUT。
            retries: 失败重试次数（>=0）。
            backoff_base: 重试退避基础间隔（秒），实际等待约为 base * 2^attempt。
            transport: 自定义 httpx transport（测试时注入 MockTransport）。
        """
        if retries < 0:
            raise ValueError("retries 必须 >= 0")
        self.webhook_url = webhook_url or os.getenv("DISCORD_WEBHOOK_URL")
        self.timeout = timeout if timeout is not None else get_http_timeout()
        self.retries = retries
        self.backoff_base = backoff_base
        self.transport = transport

    def send(self, text: str) -> bool:
        """
        发送文本消息到 Discord。

        Args:
            text: 文本内容（超长时截断）。

        Returns:
            是否发送成功；未配置 Webhook 时返回 False。
        """
        if not self.webhook_url:
            logger.warning("[Notify] 未配置 DISCORD_WEBHOOK_URL，跳过发送")
            return False

        content = text if len(text) <= _MAX_CONTENT else text[: _MAX_CONTENT - 1] + "…"
        attempt = 0
        while True:
            try:
                with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                    resp = client.post(self.webhook_url, json={"content": content})
                if resp.status_code >= 500 or resp.status_code == 429:
                    resp.raise_for_status()
                if resp.status_code >= 300:
                    logger.warning("[Notify] Discord 返回异常状态：status=%s", resp.status_code)
                    return False
                return True
            except httpx.HTTPError as err:
                logger.warning("[Notify] 发送失败：attempt=%d err=%s", attempt, err)
                if attempt >= self.retries:
                    return False
                attempt += 1
                sleep(self.backoff_base * (2**attempt))

#!filepath: streamingml/utils/logger.py
import os
import sys
from typing import Optional

from loguru import logger

# 每条日志都带 model 字段；非模型日志显示 "-"
_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {thread.name} | {extra[model]} | {message}"


class Logging:
    """
    全局日志门面（loguru）

    - log_dir=None  : 输出到 stderr
    - log_dir 指定  : 按日期切割的文件 sink，多线程写入走队列
    - for_model()   : 绑定模型名，update / predict 日志可按模型过滤
    """

    def __init__(
        self,
        log_dir: Optional[str] = None,
        rotation: str = "1 day",
        retention: str = "30 days",
        log_level: str = "INFO",
    ):
        self.log_dir = log_dir
        self.level = log_level

        logger.remove()
        logger.configure(extra={"model": "-"})

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            self.sink_id = logger.add(
                os.path.join(log_dir, "streamingml_{time:YYYY-MM-DD}.log"),
                rotation=rotation,
                retention=retention,
                level=log_level,
                format=_FORMAT,
                enqueue=True,
                backtrace=True,
                diagnose=False,
            )
        else:
            self.sink_id = logger.add(sys.stderr, level=log_level, format=_FORMAT)

    def for_model(self, name: str):
        return logger.bind(model=name)

    def debug(self, msg: str, *args, **kwargs):
        logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        logger.warning(msg, *args, **kwargs)


# 默认全局 logs（init_logging 会重新配置 sink）
logs = Logging()


def init_logging(cfg) -> Logging:
    """
    LogConfig -> 重新配置全局 logger
    """
    return Logging(
        log_dir=cfg.dir,
        rotation=cfg.rotation,
        retention=cfg.retention,
        log_level=cfg.level,
    )

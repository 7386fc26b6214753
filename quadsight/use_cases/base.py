"""
用例基类
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar


I = TypeVar('I')
O = TypeVar('O')


class UseCase(ABC, Generic[I, O]):
    """
    用例基类：一个输入，一个输出

    用例只依赖端口接口，具体适配器在构造时注入。
    """

    @abstractmethod
    def execute(self, request: I) -> O:
        """执行用例"""
        pass

    def __call__(self, request: I) -> O:
        return self.execute(request)

"""
State Machines

실사(opname) 세션의 상태 전이 관리.
pending → approved 단방향, approved는 종료 상태.
"""

import logging

from core.errors import SessionNotPending
from core.types import OpnameStatus

logger = logging.getLogger(__name__)


class StateMachineError(Exception):
    """상태 전이 오류"""
    pass


# 허용된 전이 {from: (to, ...)}
OPNAME_TRANSITIONS: dict[OpnameStatus, tuple[OpnameStatus, ...]] = {
    OpnameStatus.PENDING: (OpnameStatus.APPROVED,),
    OpnameStatus.APPROVED: (),
}


class OpnameSessionStateMachine:
    """실사 세션 상태 머신

    DB에서 읽은 상태로 생성하고, 전이 결과를 조건부 UPDATE에 사용.

    Args:
        session_id: 세션 ID (로깅/오류 메시지용)
        status: 현재 상태
    """

    def __init__(self, session_id: int, status: str | OpnameStatus = OpnameStatus.PENDING):
        self.session_id = session_id
        self._status = OpnameStatus(status)

    @property
    def status(self) -> OpnameStatus:
        return self._status

    @property
    def is_pending(self) -> bool:
        """수정 가능 여부 (카운트 입력, 승인)"""
        return self._status == OpnameStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return not OPNAME_TRANSITIONS[self._status]

    def can_transition(self, target: str | OpnameStatus) -> bool:
        return OpnameStatus(target) in OPNAME_TRANSITIONS[self._status]

    def require_pending(self) -> None:
        """pending이 아니면 SessionNotPending"""
        if not self.is_pending:
            raise SessionNotPending(self.session_id, self._status.value)

    def transition(self, target: str | OpnameStatus) -> OpnameStatus:
        """상태 전이

        Raises:
            StateMachineError: 허용되지 않은 전이
        """
        target = OpnameStatus(target)
        if not self.can_transition(target):
            raise StateMachineError(
                f"Opname session {self.session_id}: cannot move from "
                f"{self._status.value} to {target.value}"
            )

        previous = self._status
        self._status = target
        logger.debug(
            "실사 세션 상태 전이",
            extra={"session_id": self.session_id, "from": previous.value, "to": target.value},
        )
        return target

    def approve(self) -> OpnameStatus:
        """pending → approved

        Raises:
            SessionNotPending: 이미 승인된 세션
        """
        self.require_pending()
        return self.transition(OpnameStatus.APPROVED)

"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- stock: 현재 재고 / 재고 상태 / 요약
- movements: Ledger 조회, 배치 저장
- documents: 문서 번호 발급
- opname: 실사 세션
- reports: 분류 리포트
"""

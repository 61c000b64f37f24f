class ReportError(Exception):
    """
    리포트 처리 중 발생한 예외 → {"success": false, "error": message} 응답으로 변환됨
    - 400: 필수 입력 누락 (쿼리 실행 전)
    - 404: 결과가 비어 "대상 없음"을 뜻하는 경우 (과목 상세)
    - 500: 쿼리 실행 실패 (원본 에러는 로그에만 기록)
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

"""
청년정책 전체 동기화 실행 스크립트
온통청년 API 전체 목록을 페이지 단위로 가져와 policies 테이블에 저장
"""
import asyncio
import logging
import sys
from pathlib import Path

# 프로젝트 루트 경로 추가
sys.path.append(str(Path(__file__).parent.parent))

from app.core.database import engine
from app.db.init_db import init_db
from app.main import build_policy_service


async def sync_all_policies() -> int:
    """전체 정책 동기화 후 저장된 정책 수 출력"""

    print("=" * 60)
    print("청년정책 동기화 시작")
    print("=" * 60)

    await init_db()

    service = build_policy_service()
    existing_count = await service.repository.count()
    print(f"기존 저장된 정책: {existing_count}개")

    try:
        synced = await service.sync_policies()
        await service.wait_for_background_tasks()
    finally:
        await service.client.close()

    final_count = await service.repository.count()
    print("\n" + "=" * 60)
    print(f"동기화된 정책: {synced}개")
    print(f"총 저장된 정책: {final_count}개")
    print("=" * 60)
    return synced


async def main() -> int:
    try:
        await sync_all_policies()
        return 0
    except Exception as e:
        print(f"\n✗ 정책 동기화 실패: {e}")
        return 1
    finally:
        await engine.dispose()


if __name__ == "__main__":
    from dotenv import load_dotenv

    # 환경변수 로드
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    sys.exit(asyncio.run(main()))

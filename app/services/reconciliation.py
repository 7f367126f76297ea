# app/services/reconciliation.py
"""
부분 실패로 생긴 불일치를 외부 정합성 점검(reconciliation) 작업이 찾을 수 있도록 기록합니다.

- 고아 파일(OrphanAsset): Storage에는 있지만 어떤 문서도 참조하지 않는 파일
- 팔로우 그래프 비대칭: followers / following 중 한쪽만 기록된 상태
- 끊어진 댓글 ID: 삭제된 댓글의 ID가 게시물의 comment_ids 에 남아 있는 상태
- 고아 댓글: 삭제된 게시물을 가리키는 댓글 문서

이 기록은 치명적이지 않으며, 호출한 작업의 성공/실패에 영향을 주지 않습니다.
"""

import logging

from app.models.media import MediaRef

reconciliation_logger = logging.getLogger('app.reconciliation')


def report_orphan_asset(ref: MediaRef, reason: str, error: Exception = None) -> None:
    """참조하는 문서가 없는 Storage 파일을 기록합니다."""
    reconciliation_logger.warning(
        f"OrphanAsset: handle={ref.handle} kind={ref.kind.value} reason={reason} error={error}",
        extra={
            "reconciliation_type": "orphan_asset",
            "asset_handle": ref.handle,
            "asset_url": ref.url,
            "asset_kind": ref.kind.value,
            "reason": reason,
        },
    )


def report_graph_asymmetry(follower_id: str, target_id: str, committed_side: str, error: Exception = None) -> None:
    """팔로우/언팔로우 중 한쪽 문서만 갱신된 상태를 기록합니다."""
    reconciliation_logger.warning(
        f"GraphAsymmetry: follower={follower_id} target={target_id} committed={committed_side} error={error}",
        extra={
            "reconciliation_type": "graph_asymmetry",
            "follower_id": follower_id,
            "target_id": target_id,
            "committed_side": committed_side,
        },
    )


def report_dangling_comment(post_id: str, comment_id: str, error: Exception = None) -> None:
    """삭제된 댓글 ID가 게시물 문서에 남아 있는 상태를 기록합니다."""
    reconciliation_logger.warning(
        f"DanglingComment: post={post_id} comment={comment_id} error={error}",
        extra={
            "reconciliation_type": "dangling_comment",
            "post_id": post_id,
            "comment_id": comment_id,
        },
    )


def report_orphan_comments(post_id: str, error: Exception = None) -> None:
    """삭제된 게시물의 댓글(및 댓글 이미지)을 정리하지 못한 상태를 기록합니다."""
    reconciliation_logger.warning(
        f"OrphanComments: post={post_id} error={error}",
        extra={
            "reconciliation_type": "orphan_comments",
            "post_id": post_id,
        },
    )

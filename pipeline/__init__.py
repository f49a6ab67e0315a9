"""Scheduling and publish pipeline: due-article scan, publish orchestration, generation-ahead."""

"""
anet-quickstart
ANet VPN 서버 배포 및 진단을 위한 운영 도구

Features:
- client-keys.txt 기반 client.toml 생성
- Ed25519 키 길이 검증 및 설정 감사
- Docker 기반 서버 설치 및 시작
- 서버 상태 진단
"""

__version__ = "1.0.0"
__author__ = "DevOps Team"

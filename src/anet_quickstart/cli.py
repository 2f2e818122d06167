"""
CLI 메인 인터페이스
Click 및 Rich 기반 사용자 친화적 CLI
"""

import sys
import click
from rich.markup import escape
from rich.panel import Panel

from . import __version__
from .audit import audit_config, audit_keystore
from .config import Config
from .diagnostics import Diagnostics
from .errors import QuickstartError, UnreadableFile
from .generator import ClientConfigGenerator
from .installer import Installer
from .logger import init_logger, get_logger
from .output import console, print_header, print_result, print_summary
from .render import read_text


def load_config(config_path, debug: bool) -> Config:
    """설정 로드 및 로거 초기화"""
    cfg = Config(config_path)
    init_logger(cfg.log_dir, cfg.logging.log_level, debug)
    return cfg


def error(message: str):
    console.print(f"[red][ERROR][/red] {escape(message)}")


def print_report(report) -> bool:
    """감사 결과 출력, 성공 여부 반환"""
    for result in report.results:
        print_result(result)
    console.print("---")
    return report.ok


class QuickstartGroup(click.Group):
    """잘못된 인자 등 모든 Click 오류를 종료 코드 1로 통일"""

    def main(self, *args, **kwargs):
        kwargs["standalone_mode"] = False
        try:
            return super().main(*args, **kwargs)
        except click.ClickException as e:
            e.show()
            sys.exit(1)
        except click.Abort:
            click.echo("Aborted!", err=True)
            sys.exit(1)


@click.group(cls=QuickstartGroup)
@click.version_option(version=__version__)
def cli():
    """ANet VPN Server quick start

    클라이언트 설정 생성, 키 검증, 서버 설치 및 진단 도구
    """
    pass


@cli.command("generate-client")
@click.option('--server-address', required=True, metavar='IP:PORT', help='서버 주소 (예: 194.41.113.15:8443)')
@click.option('--client', 'client_num', type=click.IntRange(min=1), default=1, show_default=True,
              help='client-keys.txt 의 클라이언트 번호')
@click.option('--output', type=click.Path(dir_okay=False), help='출력 경로 (기본값: client-windows/client.toml)')
@click.option('--keys-file', type=click.Path(dir_okay=False), help='client-keys.txt 경로')
@click.option('--template', type=click.Path(dir_okay=False), help='client.toml 템플릿 경로')
@click.option('--config', '-c', type=click.Path(exists=True), help='설정 파일 경로')
@click.option('--debug', is_flag=True, help='디버그 모드')
def generate_client(server_address, client_num, output, keys_file, template, config, debug):
    """client-keys.txt 로부터 client.toml 생성"""
    cfg = load_config(config, debug)
    logger = get_logger()

    keys_path = keys_file or cfg.keys_file
    template_path = template or cfg.template
    output_path = output or cfg.client_output

    logger.info(f"Generating client config (client={client_num}, output={output_path})")
    print_header("Checking inputs")

    generator = ClientConfigGenerator(keys_path, template_path)
    try:
        generator.check_inputs()
        console.print(f"  [green]✔[/green] Keys file: {escape(str(keys_path))}")
        console.print(f"  [green]✔[/green] Template: {escape(str(template_path))}")

        result = generator.generate(server_address, client_num, output_path)

    except FileNotFoundError as e:
        error(str(e))
        logger.error(str(e))
        sys.exit(1)

    except QuickstartError as e:
        error(str(e))
        logger.error(f"Client config generation failed: {e}")
        sys.exit(1)

    except OSError as e:
        error(f"Cannot write {output_path}: {e.strerror or e}")
        logger.error(f"Client config write failed: {e}")
        sys.exit(1)

    keys = result.keys
    console.print(f"[green][INFO][/green]  Server public key: {len(keys.server_pub_key)} chars, decodes to 32 bytes")
    console.print(f"[green][INFO][/green]  Client #{client_num} private_key: "
                  f"{len(keys.private_key)} chars, decodes to 32 bytes")

    print_header("Writing client config")
    console.print(f"[green][INFO][/green]  Written: {escape(str(result.output_path))}")
    console.print("\nCopy this file to your Windows/Linux client and run the ANet client.")
    console.print(f"  scp {escape(str(result.output_path))} user@pc:./client.toml")
    sys.exit(0)


@cli.command("check-config")
@click.argument('path', type=click.Path(dir_okay=False), required=False)
@click.option('--config', '-c', type=click.Path(exists=True), help='설정 파일 경로')
@click.option('--debug', is_flag=True, help='디버그 모드')
def check_config(path, config, debug):
    """client.toml 의 address / private_key / server_pub_key 검증"""
    cfg = load_config(config, debug)
    logger = get_logger()
    path = path or str(cfg.client_output)

    console.print(f"Validating: {escape(path)}")
    console.print("---")

    try:
        text = read_text(path)
    except FileNotFoundError:
        console.print(f"[red]FAIL[/red] File not found: {escape(path)}")
        logger.error(f"Client config not found: {path}")
        sys.exit(1)
    except UnreadableFile as e:
        console.print(f"[red]FAIL[/red] {escape(str(e))}")
        logger.error(str(e))
        sys.exit(1)

    report = audit_config(text, source=path, placeholder_markers=cfg.audit.placeholder_markers)
    summary = report.summary
    logger.info(f"Audit of {path}: {summary.passed} passed, {summary.warnings} warnings, {summary.failed} failed")

    if print_report(report):
        console.print("[green]All key checks passed.[/green]")
        sys.exit(0)

    console.print("[red]Some checks failed. Fix client.toml or regenerate with "
                  "anet-quickstart generate-client[/red]")
    sys.exit(1)


@cli.command("check-keys")
@click.argument('keys_file', type=click.Path(dir_okay=False), required=False)
@click.option('--client', 'client_num', type=click.IntRange(min=1), default=1, show_default=True,
              help='검증할 클라이언트 번호')
@click.option('--config', '-c', type=click.Path(exists=True), help='설정 파일 경로')
@click.option('--debug', is_flag=True, help='디버그 모드')
def check_keys(keys_file, client_num, config, debug):
    """client-keys.txt 의 키가 32바이트로 디코딩되는지 검증"""
    cfg = load_config(config, debug)
    logger = get_logger()
    keys_file = keys_file or str(cfg.keys_file)

    console.print(f"Validating: {escape(keys_file)} (Client #{client_num})")
    console.print("---")

    try:
        text = read_text(keys_file)
    except FileNotFoundError:
        console.print(f"[red]FAIL[/red] File not found: {escape(keys_file)} (run ./generate-config.sh first)")
        logger.error(f"Keys file not found: {keys_file}")
        sys.exit(1)
    except UnreadableFile as e:
        console.print(f"[red]FAIL[/red] {escape(str(e))}")
        logger.error(str(e))
        sys.exit(1)

    report = audit_keystore(text, client_num, source=keys_file)
    logger.info(f"Key-store audit of {keys_file} (Client #{client_num}): "
                f"{'passed' if report.ok else 'failed'}")

    if print_report(report):
        console.print("[green]client-keys.txt is valid. You can run anet-quickstart generate-client[/green]")
        sys.exit(0)
    sys.exit(1)


@cli.command()
@click.option('--save-report', is_flag=True, help='리포트를 로그 디렉토리에 JSON 으로 저장')
@click.option('--config', '-c', type=click.Path(exists=True), help='설정 파일 경로')
@click.option('--debug', is_flag=True, help='디버그 모드')
def diagnose(save_report, config, debug):
    """서버 상태 진단 (컨테이너, 설정, 네트워크, 방화벽, 로그)"""
    cfg = load_config(config, debug)

    diagnostics = Diagnostics(cfg, debug)
    info = diagnostics.host_info()
    console.print(Panel.fit(
        "[bold cyan]ANet VPN Server - Diagnostics[/bold cyan]\n"
        f"Host:   {escape(info['host'])}\n"
        f"Kernel: {escape(info['kernel'])}\n"
        f"Date:   {info['date']}",
        border_style="cyan"
    ))

    with console.status("[bold green]진단 수행 중...[/bold green]"):
        sections = diagnostics.run_all()

    for title, results in sections.items():
        print_header(title)
        for result in results:
            print_result(result)

    summary = diagnostics.summary(sections)
    print_header("Summary")
    print_summary(summary)
    console.print()

    if summary.ok:
        console.print("  [green]All critical checks passed.[/green]")
    else:
        console.print(f"  [red]There are {summary.failed} failed check(s) - review output above.[/red]")

    if save_report:
        report_file = diagnostics.save_report(sections, cfg.log_dir)
        console.print(f"\n[green]✅ 리포트 저장: {escape(str(report_file))}[/green]")

    sys.exit(0 if summary.ok else 1)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument('generate_args', nargs=-1, type=click.UNPROCESSED)
@click.option('--config', '-c', type=click.Path(exists=True), help='설정 파일 경로')
@click.option('--debug', is_flag=True, help='디버그 모드')
def install(generate_args, config, debug):
    """서버 이미지 빌드 및 시작

    추가 인자(--clients N, --external-if IFACE, --bind PORT 등)는
    generate-config.sh 로 그대로 전달됩니다.
    """
    cfg = load_config(config, debug)
    installer = Installer(cfg, debug)
    success = installer.run(generate_args)
    sys.exit(0 if success else 1)


@cli.command()
@click.argument('output', type=click.Path(), default='./anet-quickstart.yaml')
def init(output):
    """샘플 설정 파일 생성"""
    cfg = Config()
    cfg.create_sample(output)
    console.print(f"[green]✓ 샘플 설정 파일 생성: {escape(output)}[/green]")
    console.print("[cyan]설정 파일을 편집한 후 다음 명령어로 실행하세요:[/cyan]")
    console.print(f"[cyan]  anet-quickstart generate-client --config {escape(output)} "
                  f"--server-address IP:PORT[/cyan]")


def main():
    """메인 엔트리 포인트"""
    cli()


if __name__ == '__main__':
    main()

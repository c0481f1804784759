#!/usr/bin/env python3
"""
Finternet Launch Script
Starts the identity service and the asset service side by side.
Service output is appended to logs/<service>.log.
"""

import os
import sys
import subprocess
import time
import signal
from pathlib import Path

class Colors:
    """ANSI color codes for terminal output"""
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'

SERVICES = [
    # (name, app factory, port variable, default port)
    ("auth-service", "finternet.main:create_auth_app", "AUTH_SERVICE_PORT", "8000"),
    ("asset-service", "finternet.main:create_asset_app", "ASSET_SERVICE_PORT", "8001"),
]

def print_colored(text, color=Colors.ENDC):
    """Print colored text to terminal"""
    print(f"{color}{text}{Colors.ENDC}")

def print_header(text):
    """Print a header with formatting"""
    print_colored(f"\n{'='*60}", Colors.HEADER)
    print_colored(f" {text}", Colors.HEADER + Colors.BOLD)
    print_colored(f"{'='*60}", Colors.HEADER)

def print_success(text):
    print_colored(f"[ok] {text}", Colors.OKGREEN)

def print_error(text):
    print_colored(f"[error] {text}", Colors.FAIL)

def get_project_root():
    """Get the project root directory (two levels up from this script)"""
    script_path = Path(__file__).resolve()
    return script_path.parent.parent.parent

def check_prerequisites():
    """The signing key must be shared by both services"""
    if not os.getenv("JWT_SECRET"):
        env_file = get_project_root() / "backend" / ".env"
        if not env_file.exists() or "JWT_SECRET" not in env_file.read_text(encoding="utf-8"):
            print_error("JWT_SECRET is not set!")
            print_colored("Export it or add it to backend/.env before starting:", Colors.WARNING)
            print_colored("  export JWT_SECRET=$(openssl rand -hex 32)", Colors.OKCYAN)
            return False
    return True

def start_service(project_root, name, factory, port):
    """Start one service with uvicorn in factory mode"""
    backend_dir = project_root / "backend"
    log_path = project_root / "logs" / f"{name}.log"
    log_path.parent.mkdir(exist_ok=True)
    print_colored(f"Starting {name}...", Colors.OKBLUE)

    try:
        # The child keeps its own handle; ours is closed when the block exits
        with open(log_path, "ab") as log_file:
            process = subprocess.Popen(
                [sys.executable, "-m", "uvicorn", factory, "--factory",
                 "--host", "0.0.0.0", "--port", str(port)],
                cwd=str(backend_dir),
                stdout=log_file,
                stderr=subprocess.STDOUT
            )

        # Give the service time to start
        time.sleep(2)

        if process.poll() is None:
            print_success(f"{name} started")
            print_colored(f"  {name}: http://localhost:{port}/api/health", Colors.OKCYAN)
            return process

        print_error(f"{name} failed to start, see {log_path}")
        tail = log_path.read_text(encoding="utf-8", errors="replace").splitlines()[-20:]
        if tail:
            print_error("Error:\n" + "\n".join(tail))
        return None

    except OSError as e:
        print_error(f"Failed to start {name}: {e}")
        return None

def cleanup_processes(processes):
    """Stop every running service"""
    print_colored("\nShutting down services...", Colors.WARNING)

    for name, process in processes:
        if process.poll() is None:
            print_colored(f"Stopping {name}...", Colors.OKCYAN)
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()

    print_success("Services stopped")

def main():
    """Main launcher function"""
    print_header("Finternet Launcher")

    if not check_prerequisites():
        sys.exit(1)

    project_root = get_project_root()
    processes = []

    try:
        for name, factory, port_var, default_port in SERVICES:
            process = start_service(project_root, name, factory, os.getenv(port_var, default_port))
            if not process:
                print_error(f"Failed to start {name}. Exiting.")
                sys.exit(1)
            processes.append((name, process))

        print_header("Finternet is running")
        print_colored("\nPress Ctrl+C to stop all services", Colors.WARNING)

        try:
            while True:
                for name, process in processes:
                    if process.poll() is not None:
                        print_error(f"{name} stopped unexpectedly")
                        return
                time.sleep(1)

        except KeyboardInterrupt:
            print_colored("\nReceived shutdown signal", Colors.WARNING)

    finally:
        cleanup_processes(processes)

if __name__ == "__main__":
    # Handle Ctrl+C gracefully
    def signal_handler(sig, frame):
        raise KeyboardInterrupt

    signal.signal(signal.SIGINT, signal_handler)
    main()

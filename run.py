# /run.py

import subprocess
import threading
import time
import os
import sys

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Streamlit puts the script's folder on sys.path, not the project root
ENV = dict(os.environ, PYTHONPATH=os.pathsep.join(filter(None, [BASE_DIR, os.environ.get("PYTHONPATH")])))


def run_fastapi():
  subprocess.run([sys.executable, "-m", "uvicorn", "catalog.main:app", "--host", "0.0.0.0", "--port", "8000", "--reload"], cwd=BASE_DIR, env=ENV)

def run_streamlit():
  time.sleep(2)
  subprocess.run([sys.executable, "-m", "streamlit", "run", "catalog/admin.py", "--server.port", "5000", "--server.address", "0.0.0.0"], cwd=BASE_DIR, env=ENV)

if __name__ == "__main__":

  t1 = threading.Thread(target=run_fastapi)
  t2 = threading.Thread(target=run_streamlit)

  t1.start()
  t2.start()

  t1.join()
  t2.join()

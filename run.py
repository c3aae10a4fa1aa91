# run.py
from dotenv import load_dotenv
import os
basedir = os.path.abspath(os.path.dirname(__file__))
# 이 파일과 같은 디렉터리의 '.env' 파일을 로드합니다.
dotenv_path = os.path.join(basedir, '.env')
load_dotenv(dotenv_path=dotenv_path)

from petline import create_app

app = create_app()

if __name__ == '__main__':
    host = os.getenv('FLASK_RUN_HOST', '127.0.0.1')
    port = int(os.getenv('FLASK_RUN_PORT', os.getenv('PORT', 5000)))
    debug = app.config.get('DEBUG', False)
    app.run(host=host, port=port, debug=debug)

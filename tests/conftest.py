import sys
from pathlib import Path

# 测试直接以顶层包名导入（algo/engine/market_data/...），需要仓库根目录在 sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Bảng mẫu cầu: tên cầu -> các biến thể (chuỗi t/x viết thường).
# Thứ tự khai báo là thứ tự phá hoà khi hai cầu khớp cùng độ dài.

PATTERN_CATALOG: dict[str, tuple[str, ...]] = {
    # cầu cơ bản
    "1-1": ("tx", "xt"),
    "bệt": ("tt", "xx"),
    "2-2": ("ttxx", "xxtt"),
    "3-3": ("tttxxx", "xxxttt"),
    "4-4": ("ttttxxxx", "xxxxtttt"),
    # cầu phức tạp
    "1-2-1": ("txxxt", "xtttx"),
    "2-1-2": ("ttxtt", "xxtxx"),
    "1-2-3": ("txxttt", "xttxxx"),
    "3-2-3": ("tttxttt", "xxxtxxx"),
    "4-2-4": ("ttttxxtttt", "xxxxttxxxx"),
    "1-3-1": ("txtttx", "xtxxxt"),
    # xen kẽ
    "zigzag": ("txt", "xtx"),
    "double_zigzag": ("txtxt", "xtxtx"),
    "triple_zigzag": ("txtxtxt", "xtxtxtx"),
    # chu kỳ dài
    "1-1-1-2": ("txttx", "xtxxt"),
    "2-1-1-1": ("ttxtx", "xxtxt"),
    "1-2-2-2": ("txxxtt", "xtttxx"),
    # hình học
    "triangle": ("txx", "xtt"),
    "square": ("ttxx", "xxtt"),
    "pentagon": ("tttxx", "xxxtt"),
    # sóng
    "wave_2": ("ttxx", "xxtt"),
    "wave_3": ("tttxxx", "xxxttt"),
    "wave_4": ("ttttxxxx", "xxxxtttt"),
    # đảo chiều
    "reverse_1": ("ttx", "xxt"),
    "reverse_2": ("ttxx", "xxtt"),
    "reverse_3": ("tttxxx", "xxxttt"),
    # giao thoa
    "interlace_1": ("txtxt", "xtxtx"),
    "interlace_2": ("ttxxtt", "xxttxx"),
    # phân nhánh
    "branch_1": ("ttxtx", "xxtxt"),
    "branch_2": ("ttxxttx", "xxttxx"),
    # xoắn ốc
    "spiral_1": ("txxxt", "xtttx"),
    "spiral_2": ("ttxxxtt", "xxtttxx"),
    # đối xứng
    "symmetry_1": ("txt", "xtx"),
    "symmetry_2": ("ttxxtt", "xxttxx"),
    "symmetry_3": ("tttxxxttt", "xxxxttxxx"),
    # lặp lại
    "repeat_1": ("tt", "xx"),
    "repeat_2": ("tttt", "xxxx"),
    "repeat_3": ("tttttt", "xxxxxx"),
    # fibonacci
    "fibonacci_1": ("t", "x"),
    "fibonacci_2": ("tx", "xt"),
    "fibonacci_3": ("txt", "xtx"),
    "fibonacci_4": ("txttx", "xtxxt"),
}

BASIC_PATTERNS = frozenset({"1-1", "bệt", "2-2", "3-3", "4-4"})

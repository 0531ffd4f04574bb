# utils/i18n.py

"""Internationalization support."""
import locale
from typing import Optional


class Translator:
    """Simple translation system for multilingual support."""

    def __init__(self):
        self.current_lang = 'en'
        self.translations = {
            'en': {
                # Usage
                'usage_hint': 'SharpFind usage: sf [keyword...] [options]  (see sf --help)',
                'app_description': 'SharpFind (sf) - fast file search over a directory walk or the Windows Search index.',

                # Diagnostics
                'warning_prefix': 'Warning:',
                'error_prefix': 'Error:',
                'invalid_size': "could not parse size '{}'",
                'invalid_date': "could not parse date/time '{}'",
                'config_load_failed': 'could not load config file {}: {}',
                'config_invalid_list': 'config value {} must be a list of names; using the default',

                # Results
                'found_status': 'Found {} matching file(s).',
                'limit_reached': 'Stopped after {} result(s); use --head N or --all to see more.',
                'scanning': 'Scanning',

                # Errors
                'index_unavailable': 'Search index is not available: {}',
                'index_not_windows': 'Windows Search requires Windows (running on {})',
                'index_no_pywin32': 'pywin32 is not installed',
                'index_open_failed': 'could not query the Windows Search service: {}',
                'index_read_failed': 'Windows Search query failed while reading results: {}',
                'root_not_found': 'Search root does not exist or is not a directory: {}',
                'search_failed': 'Search failed: {}',
                'unexpected_error': 'Unexpected error: {}',
                'interrupted': 'Interrupted by user.',
            },
            'ja': {
                # Usage
                'usage_hint': 'SharpFind 使い方: sf [検索文字列] [オプション]  (詳細は sf --help)',
                'app_description': 'SharpFind (sf) - ディレクトリ走査または Windows Search インデックスによる高速ファイル検索',

                # Diagnostics
                'warning_prefix': '警告:',
                'error_prefix': 'エラー:',
                'invalid_size': "サイズ '{}' を正しく解析できませんでした。",
                'invalid_date': "日時 '{}' を正しく解析できませんでした。",
                'config_load_failed': '設定ファイル {} を読み込めませんでした: {}',
                'config_invalid_list': '設定値 {} は名前のリストで指定してください。既定値を使用します。',

                # Results
                'found_status': '{} 件のファイルが見つかりました。',
                'limit_reached': '{} 件で打ち切りました。--head N または --all で続きを表示できます。',
                'scanning': '検索中',

                # Errors
                'index_unavailable': '検索インデックスを利用できません: {}',
                'index_not_windows': 'Windows Search は Windows でのみ利用できます (現在: {})',
                'index_no_pywin32': 'pywin32 がインストールされていません',
                'index_open_failed': 'Windows Search サービスに問い合わせできませんでした: {}',
                'index_read_failed': '結果の読み込み中に Windows Search のクエリが失敗しました: {}',
                'root_not_found': '検索ルートが存在しないかディレクトリではありません: {}',
                'search_failed': '検索に失敗しました: {}',
                'unexpected_error': '予期せぬエラー: {}',
                'interrupted': 'ユーザーにより中断されました。',
            }
        }

        # Auto-detect system language
        system_lang = self._detect_system_language()
        if system_lang:
            self.current_lang = system_lang

    @staticmethod
    def _detect_system_language() -> Optional[str]:
        try:
            system_lang = locale.getlocale()[0]
        except ValueError:
            return None
        if system_lang and system_lang.lower().startswith(('ja', 'japanese')):
            return 'ja'
        return None

    def set_language(self, lang_code: str):
        """Set the current language."""
        if lang_code in self.translations:
            self.current_lang = lang_code

    def get(self, key: str, *args) -> str:
        """Get translated string, with optional formatting."""
        text = self.translations[self.current_lang].get(key, key)
        if args:
            return text.format(*args)
        return text

# Global translator instance
translator = Translator()
